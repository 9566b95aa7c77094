#!/usr/bin/env python3
"""
Errors Module
Exception types raised while decoding glTF documents.

Document-level failures are raised to the caller of the decoder. Problems
local to a single primitive or reference are absorbed and logged unless the
decoder runs with strict options.
"""


class GltfError(RuntimeError):
    """Base class for all decoder errors"""
    pass


class GltfIoError(GltfError):
    """The asset could not be opened or its container could not be parsed"""
    pass


class GltfParseError(GltfError):
    """Structural corruption found while interpreting document contents

    Raised for accessor, buffer view or buffer references that point outside
    their target, reads running past the end of a buffer, unknown component
    types, and (under strict options) cyclic node hierarchies.
    """
    pass


class GltfMissingDataError(GltfError):
    """Required data is absent and the options say decoding must stop"""
    pass
