from ui.widgets.floor_view import FloorView

__all__ = ["FloorView"]
