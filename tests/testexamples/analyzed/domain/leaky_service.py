from __future__ import annotations

from ..web import views


class LeakyService:
    def render(self) -> str:
        return views.OrderView().title
