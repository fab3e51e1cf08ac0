from pydantic_settings import BaseSettings

DEFAULT_SYSTEM_INSTRUCTION = """You are a dedicated knowledge assistant. Answer user questions using ONLY the documents supplied to you as context.

Goal:
Give accurate, truthful answers grounded exclusively in the reference material.

Rules:
1. Source exclusivity: every answer must come directly from, or be a direct logical synthesis of, the reference material.
2. No guessing: never invent information or fall back on general knowledge.
3. Missing information: if the answer is not explicitly present in the documents, reply exactly: "I'm sorry, but the requested information is not in the documents available to me." Add nothing else.
4. Answer directly: do not say "the documents say...", just answer.
5. Stay on topic: if the user drifts away from the knowledge base, steer the conversation back politely.
6. Tone: professional, clear, concise. Avoid jargon unless the documents use it.

You are an AI assistant, do not pretend to be human. Accuracy and faithfulness to the supplied data come first."""


class Settings(BaseSettings):

    api_key: str | None = None

    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.5
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION

    chunk_size: int = 2000
    rag_top_k: int = 5

    # Session budget
    total_token_limit: int = 990000
    chars_per_token: int = 4
    initial_turn_tokens: int = 7500

    storage_path: str = "./.kbchat/store.json"
    remote_pdf_url: str | None = None
    http_timeout: float = 60.0

    locale: str = "en"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
