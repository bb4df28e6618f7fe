class HookbridgeError(Exception):
    pass


class NoRevisionToBuild(HookbridgeError):
    def __init__(self, message: str = "No revision to build") -> None:
        super().__init__(message)


class InvalidRemoteUrl(HookbridgeError, ValueError):
    def __init__(self, url: str | None) -> None:
        self.url = url
        super().__init__(f"Invalid remote url: {url!r}")
