"""
ASGI entry point: ``uvicorn lovii.main:asgi``.
"""

from lovii.app import create_app
from lovii.realtime import wrap_asgi

app = create_app()
asgi = wrap_asgi(app)
