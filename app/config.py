from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class Settings(BaseSettings):
    # Search providers
    serper_api_key: str = ""
    serper_base_url: str = "https://google.serper.dev"
    wikipedia_api_url: str = "https://en.wikipedia.org/w/api.php"
    github_api_url: str = "https://api.github.com/search/repositories"
    github_token: str = ""
    github_max_results: int = 5
    max_search_sources: int = 5

    # LLM providers
    openai_api_key: str = ""
    openai_base_url: str = ""
    anthropic_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"
    default_provider: str = "openai"  # openai | anthropic | ollama
    default_model: str = "gpt-4-turbo"

    # Per-call bounds
    search_timeout_seconds: float = 20.0
    fetch_timeout_seconds: float = 20.0
    llm_timeout_seconds: float = 120.0

    # Content fetcher
    fetch_max_chars: int = 8000
    fetch_user_agent: str = DEFAULT_USER_AGENT

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"
    log_to_file: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
