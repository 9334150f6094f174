"""UI layer: the view controller and the Streamlit front end."""

from .controller import AppView, ChatMessage, ConlangController, Notification, Operation

__all__ = ["AppView", "ChatMessage", "ConlangController", "Notification", "Operation"]
