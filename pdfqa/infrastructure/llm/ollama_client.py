
import logging

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a document question-answering assistant.

Accuracy:
- Answer STRICTLY from the document excerpts supplied in the user message.
- Never invent facts, figures, names or procedures that are not in the excerpts.
- If the excerpts do not contain the answer, say so plainly and stop.

Format:
- Fact → 1-3 sentences.
- Summary → short bullet points.
- Mention which document a detail comes from when several are quoted."""


class OllamaClient:
    """LLM client for Ollama (OpenAI-compatible API)."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434/v1",
        model: str = "qwen2.5:7b",
        max_tokens: int = 1000,
        temperature: float = 0.1,
        api_key: str = "ollama",
    ):
        """Initialize client.

        Args:
            base_url: OpenAI-compatible API URL.
            model: Model name.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
            api_key: API key; Ollama accepts any value.
        """
        self._client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def generate(self, prompt: str) -> str:
        """Generate an answer for a rendered prompt.

        Args:
            prompt: Prompt with context and question.

        Returns:
            Answer text.
        """
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.warning(f"Empty completion from {self._model}")
            return "No response from the language model."
        return content
