"""pwv の例外型定義"""

from __future__ import annotations


class PwvError(Exception):
    """pwv のエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class PwvErrorCodes:
    """PwvError のエラーコード定数。"""

    TRANSPORT_ERROR: str = "TRANSPORT_ERROR"
    DECODE_ERROR: str = "DECODE_ERROR"
    AUTHENTICATION_FAILED: str = "AUTHENTICATION_FAILED"
    NOT_AUTHENTICATED: str = "NOT_AUTHENTICATED"
    REMOTE_ERROR: str = "REMOTE_ERROR"
    MALFORMED_TIMESTAMP: str = "MALFORMED_TIMESTAMP"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"


class TransportError(PwvError):
    """ネットワーク・TLS・タイムアウトなど通信層の失敗。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(PwvErrorCodes.TRANSPORT_ERROR, message, cause)


class DecodeError(PwvError):
    """レスポンスボディが JSON として不正、または想定した形でない。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(PwvErrorCodes.DECODE_ERROR, message, cause)


class NotAuthenticated(PwvError):
    """セッショントークンを持たない状態で操作が呼ばれた。"""

    def __init__(self, message: str = "no logon token; login first") -> None:
        super().__init__(PwvErrorCodes.NOT_AUTHENTICATED, message)


class AuthenticationFailed(PwvError):
    """ログインが Vault に拒否された。

    remote_code / remote_message には Vault が返した ErrorCode / ErrorMessage が入る。
    """

    def __init__(self, remote_code: str, remote_message: str = "") -> None:
        super().__init__(
            PwvErrorCodes.AUTHENTICATION_FAILED,
            f"{remote_code} ({remote_message})",
        )
        self.remote_code = remote_code
        self.remote_message = remote_message


class RemoteError(PwvError):
    """Vault がエラーコードまたはエラーステータスを返した。"""

    def __init__(
        self,
        remote_code: str,
        remote_message: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            PwvErrorCodes.REMOTE_ERROR,
            f"{remote_code} ({remote_message})",
        )
        self.remote_code = remote_code
        self.remote_message = remote_message
        self.status_code = status_code


class MalformedTimestamp(PwvError):
    """タイムスタンプが整数として解釈できない。"""

    def __init__(self, raw: object, cause: Exception | None = None) -> None:
        super().__init__(
            PwvErrorCodes.MALFORMED_TIMESTAMP,
            f"invalid timestamp: {raw!r}",
            cause,
        )
        self.raw = raw


class ConfigError(PwvError):
    """設定ファイルの読み込み・パース・検証エラー。"""
