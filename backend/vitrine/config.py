"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "Vitrine API"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 10000

    # Browser
    scraping_headless: bool = True
    scraping_stealth: bool = True
    scraping_timeout: int = 30000  # ms, product pages
    search_timeout: int = 20000  # ms, search results
    browser_args: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-blink-features=AutomationControlled",
    ]
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/124.0.0.0 Safari/537.36"
    )
    locale: str = "pt-BR"
    accept_language: str = "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7"

    # Lazy-load scrolling
    scroll_step: int = 350  # px
    scroll_interval: int = 200  # ms
    scroll_max_steps: int | None = None  # None: scroll until the page ends
    settle_delay: int = 2000  # ms, after lazy-load scrolling

    # Queue
    scrape_concurrency: int = 2
    scrape_max_pending: int | None = None

    # Search
    search_url: str = "https://www.google.com/search?tbm=shop&hl=pt-BR&gl=br&q={query}"
    search_origin: str = "https://www.google.com"
    search_max_results: int | None = None

    # Extraction
    title_placeholder: str = "Produto"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
