# interaction/__init__.py
"""
Interaction layer: クリック/右クリック/ドラッグの状態機械と外部通知。

- state: InteractionStateMachine
- collaborators: GestureContext と通知スロット
"""
__all__ = ["state", "collaborators"]
