from systest import get


class NestedClient:
    @get("/ping")
    def ping(self) -> str: ...
