GENERIC_FETCH_ERROR = "An error occurred while fetching data"
RATE_LIMIT_MESSAGE = "API rate limit exceeded. Please wait a moment and try again."


class InputError(ValueError):
    """Rejected before any request is made."""


class EmptyAddressError(InputError):
    def __init__(self):
        super().__init__("Please enter a wallet address")


class MissingApiKeyError(InputError):
    def __init__(self, name: str = "Moralis"):
        super().__init__(f"{name} API key not found!")


class InvalidAddressError(InputError):
    def __init__(self, address: str):
        self.address = address
        super().__init__(
            "Invalid Ethereum address! The address must start with 0x "
            "and be 42 characters long."
        )


class BalanceFetchError(RuntimeError):
    def __init__(self, message: str = GENERIC_FETCH_ERROR, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message or GENERIC_FETCH_ERROR)


class RateLimitError(BalanceFetchError):
    def __init__(self):
        super().__init__(RATE_LIMIT_MESSAGE, status_code=429)
