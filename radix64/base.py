# Licensed under the GPLv3 - see LICENSE
"""File wrappers that encode or decode Radix-64 on the fly.

The `~radix64.base.Radix64FileWriter` encodes everything written to it,
keeping back at most two bytes until the file is closed, at which point
the final, possibly padded, group is written.  The
`~radix64.base.Radix64FileReader` reads whole groups of 4 characters and
returns the decoded bytes.  Both keep a running `~radix64.utils.CRC24`
of the binary data in their ``crc`` attribute, which can be compared with
a checksum transmitted separately.

Use `~radix64.base.open` to create them from a file name or filehandle.
"""
import io
import warnings

import numpy as np

from .alphabet import InvalidCharacterError, lut_decode
from .encoding import (PAD_CODE, InvalidInputLengthError, encode, decode,
                       text_array)
from .utils import byte_array, CRC24


__all__ = ['FileBase', 'Radix64FileReader', 'Radix64FileWriter', 'open']


class FileBase:
    """File wrapper, used to add Radix-64 coding to a data file.

    The underlying file is stored in ``fh_raw`` and all attributes that do not
    exist on the class itself are looked up on it.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw Radix-64 data file.
    """
    fh_raw = None

    def __init__(self, fh_raw):
        self.fh_raw = fh_raw
        self.crc = CRC24()

    def __getattr__(self, attr):
        """Try to get things on the current open file if it is not on self."""
        if not attr.startswith('_'):
            try:
                return getattr(self.fh_raw, attr)
            except AttributeError:
                pass
        #  __getattribute__ to raise appropriate error.
        return self.__getattribute__(attr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.fh_raw.close()

    def __repr__(self):
        return "{0}(fh_raw={1})".format(self.__class__.__name__, self.fh_raw)


class Radix64FileWriter(FileBase):
    """Wrapper that encodes binary data written to it as Radix-64.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle opened for writing bytes.
    """
    def __init__(self, fh_raw):
        super().__init__(fh_raw)
        self._buffer = np.zeros(0, dtype=np.uint8)

    def write(self, data):
        """Encode data and write it to the underlying file.

        Only complete groups of 3 bytes are written; any remaining bytes
        are kept until more data are written or the file is closed.

        Returns
        -------
        count : int
            The number of bytes accepted.
        """
        if self.fh_raw.closed:
            raise ValueError("I/O operation on closed file.")

        new = byte_array(data)
        octets = np.concatenate((self._buffer, new))
        nfull = len(octets) - len(octets) % 3
        encode(octets[:nfull], self.fh_raw)
        # Only account for the data once the write succeeded.
        self.crc.update(new)
        self._buffer = octets[nfull:].copy()
        return len(new)

    def close(self):
        if len(self._buffer):
            if self.fh_raw.closed:
                warnings.warn("closing with {0} buffered byte(s) that could "
                              "not be written, since the underlying file "
                              "is already closed.".format(len(self._buffer)))
            else:
                encode(self._buffer, self.fh_raw)
            self._buffer = self._buffer[:0]
        return super().close()


class Radix64FileReader(FileBase):
    """Wrapper that decodes Radix-64 data read from it.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle opened for reading.  If it returns `str` rather than
        `bytes`, the characters are ASCII-encoded.  Reads may return fewer
        characters than requested; incomplete groups are kept until the
        rest arrives.
    """
    def __init__(self, fh_raw):
        super().__init__(fh_raw)
        self._buffer = b''
        self._pending = np.zeros(0, dtype=np.uint8)
        self._offset = 0
        self._padded = False

    def read(self, count=None):
        """Read and decode data from the underlying file.

        Parameters
        ----------
        count : int, optional
            Number of bytes to return.  If not given or negative, all data
            up to the end of the file are returned.

        Returns
        -------
        data : bytes
            Decoded data.  Can be shorter than ``count`` if the end of the
            file was reached.
        """
        if count is None or count < 0:
            while self._fill():
                pass
            count = len(self._buffer)
        else:
            while len(self._buffer) < count:
                ngroup = -(-(count - len(self._buffer)) // 3)
                if not self._fill(ngroup * 4 - len(self._pending)):
                    break

        data, self._buffer = self._buffer[:count], self._buffer[count:]
        self.crc.update(data)
        return data

    def _fill(self, nchar=-1):
        """Read up to nchar characters and decode all complete groups.

        Returns `False` if the end of the file was reached.
        """
        chars = text_array(self.fh_raw.read(nchar))
        if not len(chars):
            if len(self._pending):
                raise InvalidInputLengthError(
                    "Radix-64 data ended inside a group of 4 characters.")
            return False

        if self._padded:
            raise InvalidCharacterError(chr(chars[0]), self._offset)

        chars = np.concatenate((self._pending, chars))
        nfull = len(chars) - len(chars) % 4
        self._pending = chars[nfull:].copy()
        if nfull:
            self._buffer += self._decode(chars[:nfull])
            if self._padded and len(self._pending):
                raise InvalidCharacterError(chr(self._pending[0]),
                                            self._offset)
        return True

    def _decode(self, chars):
        try:
            octets = decode(chars)
        except InvalidCharacterError as exc:
            raise InvalidCharacterError(
                exc.char, exc.position + self._offset) from None

        self._offset += len(chars)
        if chars[-1] == PAD_CODE:
            self._padded = True
            npad = 2 if chars[-2] == PAD_CODE else 1
            last = lut_decode[chars[-1-npad]]
            if last & (0xf if npad == 2 else 0x3):
                warnings.warn("final group has non-zero padding bits, "
                              "which were ignored.")

        return octets


def open(name, mode='rb'):
    """Open a Radix-64 file for reading or writing.

    Opened for writing, binary data written to the returned wrapper are
    encoded; opened for reading, the Radix-64 data in the file are decoded.

    Parameters
    ----------
    name : str or filehandle
        File name or filehandle.  On closing, the file is closed as well.
    mode : {'rb', 'wb'}, optional
        Whether to open for reading or writing.  Default: 'rb'.

    Returns
    -------
    fh : `~radix64.base.Radix64FileReader` or `~radix64.base.Radix64FileWriter`
    """
    classes = {'rb': Radix64FileReader,
               'wb': Radix64FileWriter}
    if mode in {'r', 'w'}:
        mode += 'b'
    elif mode[::-1] in classes:
        mode = mode[::-1]

    if mode not in classes:
        raise ValueError(f'invalid mode: {mode} '
                         f'(Radix-64 files support {set(classes)}).')

    if not (hasattr(name, 'read') or hasattr(name, 'write')):
        name = io.open(name, mode)

    return classes[mode](name)
