# Licensed under the GPLv3 - see LICENSE
"""
Definitions of the Radix-64 alphabet.

Each 6-bit index maps to one printable ASCII character:

  ======= ===========
  Index   Character
  ======= ===========
   0-25   ``A``-``Z``
  26-51   ``a``-``z``
  52-61   ``0``-``9``
   62     ``+``
   63     ``/``
  ======= ===========

The pad character ``=`` is not part of the alphabet; it only marks an
incomplete final group and has to be dealt with by the caller.

For the specification, see https://www.rfc-editor.org/rfc/rfc4880#section-6.3
"""
from operator import index

import numpy as np


__all__ = ['ALPHABET', 'PAD', 'InvalidCharacterError',
           'init_luts', 'lut_encode', 'lut_decode',
           'index_to_char', 'char_to_index']


ALPHABET = (b'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
            b'abcdefghijklmnopqrstuvwxyz'
            b'0123456789+/')
"""The 64 characters, in order of their index."""
PAD = b'='
"""Character used to pad the final group."""


class InvalidCharacterError(ValueError):
    """Character outside the Radix-64 alphabet.

    Parameters
    ----------
    char : str
        The offending character.
    position : int, optional
        Its position in the input, if known.
    """
    def __init__(self, char, position=None):
        self.char = char
        self.position = position
        msg = "invalid Radix-64 character {0!r}".format(char)
        if position is not None:
            msg += " at position {0}".format(position)
        super().__init__(msg)


def init_luts():
    """Set up the look-up tables between indices and ASCII codes.

    Returns
    -------
    lut_encode : `~numpy.ndarray`
        64 ASCII codes as ``uint8``, in order of index.
    lut_decode : `~numpy.ndarray`
        For each of the 256 possible byte values, the index as ``int16``,
        or -1 if the byte is not in the alphabet.
    """
    idx = np.arange(64)
    lut_encode = np.where(idx < 26, idx + ord('A'),
                          np.where(idx < 52, idx - 26 + ord('a'),
                                   np.where(idx < 62, idx - 52 + ord('0'),
                                            np.where(idx == 62, ord('+'),
                                                     ord('/')))))
    lut_encode = lut_encode.astype(np.uint8)
    lut_decode = np.full(256, -1, dtype=np.int16)
    lut_decode[lut_encode] = np.arange(64)
    return lut_encode, lut_decode


lut_encode, lut_decode = init_luts()
lut_encode.flags.writeable = False
lut_decode.flags.writeable = False


def index_to_char(idx):
    """Get the character encoding a 6-bit index.

    Parameters
    ----------
    idx : int
        Index in the range 0 to 63.

    Returns
    -------
    char : str
        Single character from the alphabet.
    """
    idx = index(idx)
    if not 0 <= idx < 64:
        raise ValueError("index {0} is not a 6-bit value.".format(idx))
    return chr(lut_encode[idx])


def char_to_index(char):
    """Get the 6-bit index encoded by a character.

    Parameters
    ----------
    char : str, bytes, or int
        A single character, a single byte, or a byte value.

    Returns
    -------
    idx : int
        Index in the range 0 to 63.

    Raises
    ------
    InvalidCharacterError
        If the character is not in the alphabet.  This includes the
        pad character, which callers should deal with before.
    """
    if isinstance(char, str):
        code = ord(char) if len(char) == 1 else -1
    elif isinstance(char, (bytes, bytearray)):
        code = char[0] if len(char) == 1 else -1
    else:
        code = index(char)

    idx = lut_decode[code] if 0 <= code < 256 else -1
    if idx < 0:
        raise InvalidCharacterError(char)
    return int(idx)
