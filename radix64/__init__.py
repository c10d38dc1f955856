# Licensed under the GPLv3 - see LICENSE
"""Radix-64 encoding and CRC24 checksums.

The OpenPGP Radix-64 encoding wraps binary data in ASCII characters that
survive character set translation and the like.  It consists of a base64
encoding (`~radix64.encoding`) of the data and a 24-bit checksum
(`~radix64.utils.crc24`) that callers can transmit alongside it.
"""
from .alphabet import (ALPHABET, PAD, InvalidCharacterError,  # noqa
                       index_to_char, char_to_index)
from .encoding import InvalidInputLengthError, encode, decode  # noqa
from .utils import crc24, CRC24  # noqa
from .base import open  # noqa

try:
    from .version import version as __version__
except ImportError:
    __version__ = ''

# Define minima for the documentation, but do not bother to explicitly check.
__minimum_python_version__ = '3.10'
__minimum_numpy_version__ = '1.24'
