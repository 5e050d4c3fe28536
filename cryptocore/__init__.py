from .config import AppConfig, EncryptionSettings, HashingSettings, OtpSettings, load_config
from .charsets import CharacterSetGroups
from .errors import (
    ErrorKind,
    CryptoError,
    InvalidArgument,
    InvalidKeyLength,
    AuthenticationFailed,
    MalformedPayload,
    UnsupportedAlgorithm,
    InvalidCharacter,
    InvalidPadding,
)
from .random_source import RandomSource, SystemRandomSource
