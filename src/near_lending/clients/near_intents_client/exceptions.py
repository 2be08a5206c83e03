"""NEAR Intents Custom Exceptions"""

class NearIntentsError(Exception):
    """Base exception for NEAR Intents"""
    pass

class NearConnectionError(NearIntentsError):
    """Error connecting to NEAR RPC, the Solver Bus or an explorer API"""
    pass

class IntentExecutionError(NearIntentsError):
    """Error during intent or contract execution"""
    pass

class ValidationError(NearIntentsError):
    """Error validating parameters or responses"""
    pass

class ConfigurationError(NearIntentsError):
    """Required configuration is missing or invalid"""
    pass

class KeyRetrievalError(ConfigurationError):
    """Signing key material could not be retrieved for an account"""
    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"No signing key available for account {account_id}")

class TokenSupportError(ValidationError):
    """Error when token is not supported"""
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Token {token} is not supported")
