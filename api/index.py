"""Vercel entry point: imports the Flask chat app from the project root."""
import sys
import os

# Add project root to PYTHONPATH so `incorpify` and `web_chat` are resolvable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from web_chat import app  # noqa: F401  (Vercel detects `app`)
