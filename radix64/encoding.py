# Licensed under the GPLv3 - see LICENSE
"""Encoder and decoder for Radix-64 data.

Every group of 3 bytes is split into four 6-bit indices, most significant
bits first, which are mapped to characters using the alphabet::

  +--first octet--+-second octet--+--third octet--+
  |7 6 5 4 3 2 1 0|7 6 5 4 3 2 1 0|7 6 5 4 3 2 1 0|
  +-----------+---+-------+-------+---+-----------+
  |5 4 3 2 1 0|5 4 3 2 1 0|5 4 3 2 1 0|5 4 3 2 1 0|
  +--1.index--+--2.index--+--3.index--+--4.index--+

A final group of 2 bytes is padded with zero bits to 3 indices and one
``=`` character; a final group of 1 byte to 2 indices and ``==``.

Both `encode` and `decode` work on whole blocks at a time using `numpy`
look-up tables, and write each block to the output as it is done.
"""
import io
from operator import index

import numpy as np

from .alphabet import PAD, InvalidCharacterError, lut_encode, lut_decode
from .utils import byte_array


__all__ = ['BLOCK_SIZE', 'InvalidInputLengthError', 'encode', 'decode']


BLOCK_SIZE = 3 * 4096
"""Default number of bytes encoded (or decoded) per write to the output."""

PAD_CODE = PAD[0]

shift_encode = np.array([18, 12, 6, 0], dtype=np.uint32)
shift_decode = np.array([16, 8, 0], dtype=np.uint32)


class InvalidInputLengthError(ValueError):
    """Radix-64 text with a length that is not a multiple of 4."""
    pass


def encode_groups(octets):
    """Encode bytes, assuming their number is a multiple of 3.

    Parameters
    ----------
    octets : `~numpy.ndarray` of byte

    Returns
    -------
    chars : `~numpy.ndarray` of byte
        ASCII codes of the encoded characters, 4 for every 3 input bytes.
    """
    groups = octets.reshape(-1, 3).astype(np.uint32)
    words = (groups[:, 0] << 16) | (groups[:, 1] << 8) | groups[:, 2]
    indices = (words[:, np.newaxis] >> shift_encode) & 0x3f
    return lut_encode.take(indices).ravel()


def decode_groups(indices):
    """Decode indices, assuming their number is a multiple of 4.

    Parameters
    ----------
    indices : `~numpy.ndarray` of int
        Indices in the range 0 to 63, i.e., already checked for validity.

    Returns
    -------
    octets : `~numpy.ndarray` of byte
        Decoded bytes, 3 for every 4 input indices.
    """
    groups = indices.reshape(-1, 4).astype(np.uint32)
    words = ((groups[:, 0] << 18) | (groups[:, 1] << 12)
             | (groups[:, 2] << 6) | groups[:, 3])
    octets = (words[:, np.newaxis] >> shift_decode) & 0xff
    return octets.astype(np.uint8).ravel()


def encode(data, out=None, *, block_size=BLOCK_SIZE):
    """Encode binary data into Radix-64.

    Parameters
    ----------
    data : bytes or array of unsigned bytes
        Data to encode.  See `~radix64.utils.byte_array` for the possible
        types.
    out : file-like, optional
        Output to write the ASCII-encoded characters to.  Only its
        ``write`` method is used.  If not given, the encoded data are
        returned instead.
    block_size : int, optional
        Maximum number of input bytes to encode per write; rounded down to
        a multiple of 3.  Default: `BLOCK_SIZE`.

    Returns
    -------
    encoded : bytes or None
        The encoded data if ``out`` was not given.  Its length is always
        a multiple of 4.
    """
    octets = byte_array(data)
    if out is None:
        out = io.BytesIO()
        encode(octets, out, block_size=block_size)
        return out.getvalue()

    block_size = max(index(block_size) // 3, 1) * 3
    nfull = len(octets) - len(octets) % 3
    for start in range(0, nfull, block_size):
        block = octets[start:min(start + block_size, nfull)]
        out.write(encode_groups(block).tobytes())

    nrem = len(octets) - nfull
    if nrem:
        # Pad with zero bytes, and replace the superfluous characters.
        tail = np.zeros(3, dtype=np.uint8)
        tail[:nrem] = octets[nfull:]
        chars = encode_groups(tail)[:nrem+1].tobytes()
        out.write(chars + PAD * (3 - nrem))


def decode(text, out=None, *, block_size=BLOCK_SIZE):
    """Decode Radix-64 data into binary data.

    The whole input is checked before anything is written to the output.

    Parameters
    ----------
    text : bytes, str, or array of unsigned bytes
        Radix-64 data, i.e., ASCII characters from the alphabet, possibly
        followed by up to two pad characters.
    out : file-like, optional
        Output to write the decoded bytes to.  Only its ``write`` method is
        used.  If not given, the decoded data are returned instead.
    block_size : int, optional
        Maximum number of decoded bytes per write; rounded down to a
        multiple of 3.  Default: `BLOCK_SIZE`.

    Returns
    -------
    decoded : bytes or None
        The decoded data if ``out`` was not given.

    Raises
    ------
    InvalidInputLengthError
        If the number of characters is not a multiple of 4.
    ~radix64.alphabet.InvalidCharacterError
        If a character is not in the alphabet, or a pad character is
        anywhere but in the last two positions.
    """
    if isinstance(text, str):
        # Length comes before character validity, also for non-ASCII text.
        check_length(len(text))
    chars = text_array(text)
    if out is None:
        out = io.BytesIO()
        decode(chars, out, block_size=block_size)
        return out.getvalue()

    indices = check_chars(chars)

    block_size = max(index(block_size) // 3, 1) * 4
    nfull = len(indices) - len(indices) % 4
    for start in range(0, nfull, block_size):
        block = indices[start:min(start + block_size, nfull)]
        out.write(decode_groups(block).tobytes())

    nrem = len(indices) - nfull
    if nrem:
        # Pad with zero indices, and remove the superfluous bytes.
        # Any bits beyond the last full byte are ignored.
        tail = np.zeros(4, dtype=indices.dtype)
        tail[:nrem] = indices[nfull:]
        out.write(decode_groups(tail)[:nrem-1].tobytes())


def text_array(text):
    """Convert Radix-64 text to an array of ASCII codes."""
    if isinstance(text, str):
        try:
            text = text.encode('ascii')
        except UnicodeEncodeError as exc:
            raise InvalidCharacterError(text[exc.start], exc.start) from None

    return byte_array(text)


def check_length(nchar):
    if nchar % 4 != 0:
        raise InvalidInputLengthError(
            "Radix-64 data should have a multiple of 4 characters, not {0}."
            .format(nchar))


def check_chars(chars):
    """Check Radix-64 characters and convert them to indices.

    Parameters
    ----------
    chars : `~numpy.ndarray` of byte
        ASCII codes of the characters.

    Returns
    -------
    indices : `~numpy.ndarray`
        Indices of the characters before any padding.  Its length
        modulo 4 will be 0, 2, or 3.
    """
    nchar = len(chars)
    check_length(nchar)

    if nchar == 0:
        ndata = 0
    elif chars[-2] == PAD_CODE:
        if chars[-1] != PAD_CODE:
            raise InvalidCharacterError(chr(chars[-1]), nchar - 1)
        ndata = nchar - 2
    elif chars[-1] == PAD_CODE:
        ndata = nchar - 1
    else:
        ndata = nchar

    indices = lut_decode.take(chars[:ndata])
    bad = np.flatnonzero(indices < 0)
    if len(bad):
        position = int(bad[0])
        raise InvalidCharacterError(chr(chars[position]), position)

    return indices
