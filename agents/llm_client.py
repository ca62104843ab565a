# agents/llm_client.py
import google.generativeai as genai

from config import ConfigError, Settings


class GeminiClient:
    """
    Thin async wrapper around a Gemini model, configured for JSON-only replies.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        temperature: float = 0.2,
        max_output_tokens: int = 700,
    ):
        if not api_key:
            raise ConfigError("GEMINI_API_KEY is missing")
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)
        self.generation_config = genai.types.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            top_p=1,
            response_mime_type="application/json",
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            temperature=settings.temperature,
            max_output_tokens=settings.max_output_tokens,
        )

    async def generate(self, prompt: str) -> str:
        response = await self.model.generate_content_async(
            prompt,
            generation_config=self.generation_config,
        )
        return (response.text or "").strip()
