class ConfigurationError(ValueError):
    """Generic error thrown if there was an error while reading the run definition."""


class DefinitionConfigurationError(ConfigurationError):
    """A section of the run definition file holds an invalid value."""


class AccountConfigurationError(ConfigurationError):
    """The account settings are missing a key or hold a malformed value."""


class ArtifactFileError(ConfigurationError):
    """There was an error while reading a contract artifact from disk."""


class ArtifactFileMissing(ArtifactFileError):
    """The configured artifact path does not exist."""
