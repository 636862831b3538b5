class AcquisitionError(Exception):
    """Base exception for everything that can go wrong while acquiring an instance."""


class TransportError(AcquisitionError):
    """Raised when a network request fails."""


class LocalIOError(AcquisitionError):
    """Raised when reading or writing the local filesystem fails."""


class DecodeError(AcquisitionError):
    """Raised when downloaded bytes are not valid UTF-8 text."""


class ManifestParseError(AcquisitionError):
    """Raised when a manifest does not match the expected schema."""


class VersionNotFoundError(AcquisitionError):
    def __init__(self, version_id: str):
        super().__init__(f"Cannot find version with id: {version_id}")
        self.version_id = version_id


class ResourceNotReadyError(AcquisitionError):
    """Raised when the version manifest is needed before it has been loaded."""


class InvalidDownloadError(AcquisitionError):
    """Raised when a freshly downloaded artifact does not match its expected hash."""


class HashMismatchError(InvalidDownloadError):
    def __init__(self, name: str, expected: str, actual: str):
        super().__init__(f"Error downloading {name}, invalid hash (expected {expected}, got {actual})")
        self.name = name
        self.expected = expected
        self.actual = actual


class NativeExtractionError(AcquisitionError):
    """Raised when a native classifier archive cannot be extracted."""


class ItemHandlerError(AcquisitionError):
    """Raised when a download callback fails with something other than an AcquisitionError."""


class ConfigurationError(AcquisitionError):
    """A manifest or host violates a contract this code relies on. Not recoverable."""


class RuleContractError(ConfigurationError):
    """Raised for rule actions or predicate keys outside the known set."""


class UnsupportedPlatformError(ConfigurationError):
    """Raised when the host cannot be mapped to a java manifest key."""


class MissingRuntimeComponentError(ConfigurationError):
    def __init__(self, component: str, platform_key: str):
        super().__init__(f"Java runtime is empty for component {component} on {platform_key}")
        self.component = component
        self.platform_key = platform_key
