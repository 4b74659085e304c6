from .llm_gateway import HttpClient, HttpResponse, LlmGatewayError, chat, complete, strip_code_fences, transcribe

__all__ = ["HttpClient", "HttpResponse", "LlmGatewayError", "chat", "complete", "strip_code_fences", "transcribe"]
