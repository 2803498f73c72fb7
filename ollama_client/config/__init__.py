from ollama_client.config.loader import ClientSettings, Config, LoggingSettings, get_config

__all__ = ["ClientSettings", "Config", "LoggingSettings", "get_config"]
