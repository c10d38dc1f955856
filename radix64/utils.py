# Licensed under the GPLv3 - see LICENSE
from operator import index

import numpy as np


__all__ = ['CRC24_INIT', 'CRC24_POLY', 'byte_array', 'init_crc_lut',
           'crc24', 'CRC24']


CRC24_INIT = 0xB704CE
"""Initial value of the CRC24 register."""
CRC24_POLY = 0x1864CFB
"""Generator polynomial, x^24 + x^23 + x^18 + x^17 + x^14 + x^11 + x^10
+ x^7 + x^6 + x^5 + x^4 + x^3 + x + 1."""


def byte_array(data):
    """Convert the data to a byte array.

    Parameters
    ----------
    data : bytes, bytearray, memoryview, `~numpy.ndarray`, or iterable of int
        Data to convert.  If a buffer or `~numpy.ndarray`, a byte array view
        is taken.  If an iterable of int, the integers need to fit in an
        unsigned byte.

    Returns
    -------
    byte_array : `~numpy.ndarray` of byte
        One-dimensional, with the bytes in memory order.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        # Quick turn-around for input that is OK already:
        return np.frombuffer(data, dtype=np.uint8)

    if isinstance(data, (np.ndarray, np.generic)):
        data = np.ascontiguousarray(np.atleast_1d(data))
        return data.reshape(-1).view('u1')

    if isinstance(data, str):
        raise TypeError('cannot interpret str as bytes; encode it first.')

    data = np.array(list(data), ndmin=1)
    if data.size == 0:
        return data.astype(np.uint8)

    if (data.dtype.kind not in 'ui'
            or data.min() < 0
            or data.max() >= 1 << 8):
        raise ValueError('values have to fit in 8 bit unsigned int.')
    return data.astype(np.uint8)


def init_crc_lut(polynomial=CRC24_POLY):
    """Set up the look-up table for the CRC24 of a single byte.

    Entry ``i`` holds the register obtained from ``i << 16`` after the
    eight shift-and-reduce rounds, so that one byte can be processed
    with a single look-up.
    """
    crc = np.arange(256, dtype=np.uint32) << 16
    for _ in range(8):
        crc <<= 1
        # Reduce wherever bit 24 is set.
        mask = (crc & 0x1000000).astype(bool).astype(crc.dtype)
        mask *= polynomial
        crc ^= mask
    return crc & 0xFFFFFF


lut_crc = init_crc_lut().tolist()


def _crc24_update(crc, data):
    for octet in byte_array(data).tobytes():
        crc = ((crc << 8) & 0xFFFFFF) ^ lut_crc[(crc >> 16) ^ octet]
    return crc


def crc24(data):
    """Calculate the 24-bit checksum of the given data.

    Parameters
    ----------
    data : bytes or array of unsigned bytes
        Complete data to calculate the checksum for.  See `byte_array`
        for the possible types.

    Returns
    -------
    crc : int
        The checksum, in the range 0 to 0xFFFFFF.

    See Also
    --------
    radix64.utils.CRC24 :
        for calculating the checksum over data that arrives in pieces.
    """
    return _crc24_update(CRC24_INIT, data) & 0xFFFFFF


class CRC24:
    """Running 24-bit cyclic redundancy check.

    See https://www.rfc-editor.org/rfc/rfc4880#section-6.1

    The instance keeps the checksum register, so data can be fed in
    pieces using ``update``.  The result is the same as that of
    `~radix64.utils.crc24` on all pieces concatenated.

    Parameters
    ----------
    data : bytes or array of unsigned bytes, optional
        Initial data to feed in.
    """
    init = CRC24_INIT
    polynomial = CRC24_POLY

    def __init__(self, data=b''):
        self.reset()
        self.update(data)

    def __len__(self):
        return self.polynomial.bit_length() - 1

    def reset(self):
        """Reset the register to its initial value."""
        self._crc = self.init

    def update(self, data):
        """Feed more data into the checksum.

        Returns
        -------
        self : `~radix64.utils.CRC24`
            To allow chaining.
        """
        self._crc = _crc24_update(self._crc, data)
        return self

    @property
    def value(self):
        """Checksum of all data fed in so far."""
        return self._crc & 0xFFFFFF

    def __int__(self):
        return self.value

    def digest(self):
        """Checksum as three big-endian bytes."""
        return self.value.to_bytes(3, 'big')

    def check(self, expected):
        """Check that the checksum equals the expected one.

        Parameters
        ----------
        expected : int or bytes
            Checksum as an integer, or as three big-endian bytes (e.g.,
            as decoded from the checksum line of an armored message).

        Returns
        -------
        ok : bool
            `True` if the checksums are equal.
        """
        if isinstance(expected, (bytes, bytearray)):
            if len(expected) != 3:
                raise ValueError('checksum should have 3 bytes.')
            expected = int.from_bytes(expected, 'big')

        return self.value == index(expected)

    def __repr__(self):
        return '{0}(0x{1:06X})'.format(self.__class__.__name__, self.value)
