"""AI Business Promoter backend: prompt relay over several text-generation APIs."""
