from .app import create_app, run_http

__all__ = ["create_app", "run_http"]
