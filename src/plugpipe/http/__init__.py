"""
HTTP Adapters

FastAPI wiring for pipelines: a generic endpoint adapter and the example
chatbot and moderation servers.
"""

from .adapter import PipelineEndpoint, create_pipeline_app
from .servers import SessionStore, create_chatbot_app, create_moderation_app

__all__ = [
    'PipelineEndpoint',
    'create_pipeline_app',
    'SessionStore',
    'create_chatbot_app',
    'create_moderation_app',
]
