from typing import Tuple, Dict, Optional

from openai import OpenAI, OpenAIError

from app.ports import LLMPort, CompletionError


class OpenAIAdapter(LLMPort):
    def __init__(self, model: str, api_key: Optional[str] = None):
        self.model = model
        self.api_key = api_key
        self._client = None

    @property
    def client(self) -> OpenAI:
        # built on first call so a missing key fails the request, not app startup
        if self._client is None:
            try:
                self._client = OpenAI(api_key=self.api_key) if self.api_key else OpenAI()
            except OpenAIError as e:
                raise CompletionError(f"OpenAI client unavailable: {e}") from e
        return self._client

    def chat(self, system: str, user: str, temperature: float, max_tokens: int) -> Tuple[str, Dict]:
        client = self.client
        try:
            resp = client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[{"role":"system","content":system}, {"role":"user","content":user}]
            )
        except OpenAIError as e:
            raise CompletionError(f"{self.model} completion failed: {e}") from e
        msg = resp.choices[0].message.content or ""
        usage = getattr(resp, "usage", None)
        usage = usage.model_dump() if usage else {}
        return msg, usage
