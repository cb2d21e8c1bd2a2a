from __future__ import annotations


class FakeOrderSource:
    pass
