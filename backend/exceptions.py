"""Error taxonomy shared by the stock ledger and the document assembler."""


class ValidationFailure(ValueError):
    """An action was attempted on something that does not exist or is not eligible."""


class NothingToGenerateError(ValidationFailure):
    """A document was requested but there is no tissue/link data to put in it."""


class RemoteOperationError(RuntimeError):
    """The data store rejected an operation. The message is the store's own."""


class AssetFailure(Exception):
    """A single image could not be downloaded, decoded or compressed in time.

    Never leaves the document assembler: the affected card falls back to its swatch.
    """
