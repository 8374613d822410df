"""
Keyed hashing for values that round-trip through an untrusted client.

Demands are signed server-side, handed to the browser and posted back. The
server recomputes the HMAC and compares it in constant time before trusting
any field.
"""
import hashlib
import hmac
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from app.platform.config import settings

# Bump when the field order or separator of any signing string changes.
SIGNING_VERSION = 1
SIGNING_SEPARATOR = "|"

UNTRUSTED_CONTEXT = "untrusted"


class HashService:
    """HMAC-SHA256 over a process secret plus a per-purpose additional secret."""

    def __init__(self, secret_key: Optional[str] = None):
        self._secret_key = secret_key if secret_key is not None else settings.SECRET_KEY

    def hmac(self, data: str, additional_secret: str) -> str:
        if not self._secret_key:
            raise ValueError("SECRET_KEY must not be empty")
        key = (self._secret_key + additional_secret).encode("utf-8")
        return hmac.new(key, data.encode("utf-8"), hashlib.sha256).hexdigest()

    def validate_hmac(self, data: str, additional_secret: str, signature: str) -> bool:
        expected = self.hmac(data, additional_secret)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def get_hash_service() -> HashService:
    return HashService()


class SignedDemand(BaseModel):
    """
    Immutable value object carrying the parameters of a privileged action plus
    an HMAC over them.

    Constructing a demand without a signature signs it. Demands received from a
    client must go through ``from_payload``, which requires the signature to be
    present and never signs on the caller's behalf.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # Subclasses list the fields that enter the signing string, in order.
    signed_fields: ClassVar[tuple] = ()

    signature: str = Field(default="", validate_default=True)

    @field_validator("signature")
    @classmethod
    def _require_signature_from_client(cls, value: str, info: ValidationInfo) -> str:
        if info.context and info.context.get(UNTRUSTED_CONTEXT) and not value:
            raise ValueError("signature is required")
        return value

    def model_post_init(self, __context: Any) -> None:
        if not self.signature:
            # frozen model: bypass the pydantic setattr guard once, at construction
            object.__setattr__(self, "signature", self._create_signature())

    @classmethod
    def signing_tag(cls) -> str:
        return cls.__name__

    def signing_string(self) -> str:
        return SIGNING_SEPARATOR.join(
            self._render_field(getattr(self, name)) for name in self.signed_fields
        )

    @staticmethod
    def _render_field(value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return ",".join(str(item) for item in value)
        return str(value)

    def _create_signature(self) -> str:
        return HashService().hmac(self.signing_string(), self.signing_tag())

    def validate_signature(self) -> bool:
        """True only if the stored signature matches the current field values."""
        if not self.signature:
            return False
        return HashService().validate_hmac(
            self.signing_string(), self.signing_tag(), self.signature
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]):
        """Rebuild a demand posted by the client. Raises pydantic.ValidationError."""
        return cls.model_validate(payload, context={UNTRUSTED_CONTEXT: True})
