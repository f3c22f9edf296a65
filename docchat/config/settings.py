from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # Completion service (any OpenAI-compatible endpoint, e.g. Ollama at http://localhost:11434/v1)
    llm_base_url: str | None = None
    llm_api_key: str | None = None
    llm_model: str = "gpt-3.5-turbo-1106"
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.8

    embedding_model: str = "intfloat/multilingual-e5-base"
    embedding_query_prefix: str = "query: "
    embedding_passage_prefix: str = "passage: "

    # Vector store: "chroma" | "pgvector" | "memory"
    vector_store_backend: str = "pgvector"
    distance_metric: str = "cosine"

    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "docchat"
    chroma_pool_size: int = 10

    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5434
    postgres_user: str = "pgvector"
    postgres_password: str = "admin"
    postgres_db: str = "pgvector-db"
    postgres_table: str = "docchat_chunks"
    postgres_pool_min: int = 2
    postgres_pool_max: int = 10

    docs_path: str = "./docs"
    chunk_size: int = 1000
    chunk_overlap: int = 50
    embedding_retries: int = 1

    document_chat_top_k: int = 3

    agent_max_iterations: int = 5
    agent_system_prompt: str = "You are an agent that follows SI system standards and responds normally"
    tavily_api_key: str | None = None
    tavily_max_results: int = 1

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
