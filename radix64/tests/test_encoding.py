# Licensed under the GPLv3 - see LICENSE
import base64
import io

import pytest
import numpy as np

from ..alphabet import InvalidCharacterError
from ..encoding import (InvalidInputLengthError, encode, decode,
                        encode_groups, decode_groups)


# Test vectors from the test data of the reference implementation.
VECTORS = ((b'\x14\xfb\x9c\x03\xd9\x7e', b'FPucA9l+'),
           (b'\x14\xfb\x9c\x03\xd9', b'FPucA9k='),
           (b'\x14\xfb\x9c\x03', b'FPucAw=='))


class Sink:
    """Output that records each write separately."""
    def __init__(self):
        self.writes = []

    def write(self, data):
        self.writes.append(data)
        return len(data)

    def getvalue(self):
        return b''.join(self.writes)


class TestVectors:
    @pytest.mark.parametrize(('data', 'text'), VECTORS)
    def test_encode(self, data, text):
        assert encode(data) == text

    @pytest.mark.parametrize(('data', 'text'), VECTORS)
    def test_decode(self, data, text):
        assert decode(text) == data
        assert decode(text.decode('ascii')) == data

    @pytest.mark.parametrize(('data', 'text'), VECTORS)
    def test_to_sink(self, data, text):
        out = io.BytesIO()
        assert encode(data, out) is None
        assert out.getvalue() == text
        out = io.BytesIO()
        assert decode(text, out) is None
        assert out.getvalue() == data

    def test_empty(self):
        assert encode(b'') == b''
        assert decode(b'') == b''
        assert decode('') == b''
        out = Sink()
        encode(b'', out)
        decode(b'', out)
        assert out.writes == []


class TestEncode:
    def setup_class(cls):
        cls.data = np.random.default_rng(12345).integers(
            0, 256, 1000, dtype=np.uint8).tobytes()

    @pytest.mark.parametrize('n', (1, 2, 3, 4, 5, 6, 7, 299, 300, 1000))
    def test_against_base64(self, n):
        data = self.data[:n]
        assert encode(data) == base64.b64encode(data)

    @pytest.mark.parametrize('n', range(13))
    def test_length_and_padding(self, n):
        encoded = encode(self.data[:n])
        assert len(encoded) == 4 * -(-n // 3)
        npad = len(encoded) - len(encoded.rstrip(b'='))
        assert npad == {0: 0, 1: 2, 2: 1}[n % 3]
        assert b'=' not in encoded.rstrip(b'=')

    def test_input_types(self):
        data = self.data[:10]
        expected = encode(data)
        assert encode(bytearray(data)) == expected
        assert encode(memoryview(data)) == expected
        assert encode(np.frombuffer(data, np.uint8)) == expected
        assert encode(list(data)) == expected
        assert encode(iter(data)) == expected
        assert encode([]) == b''

    def test_input_multibyte_array(self):
        words = np.array([0x04030201], dtype='<u4')
        assert encode(words) == encode(b'\x01\x02\x03\x04')

    def test_invalid_input(self):
        with pytest.raises(TypeError):
            encode('abc')
        with pytest.raises(ValueError):
            encode([1, 256])
        with pytest.raises(ValueError):
            encode([-1])

    @pytest.mark.parametrize('block_size', (1, 3, 4, 6, 300))
    def test_blocks(self, block_size):
        out = Sink()
        encode(self.data, out, block_size=block_size)
        assert out.getvalue() == base64.b64encode(self.data)
        nbytes = max(block_size // 3, 1) * 3
        assert all(len(chunk) <= nbytes // 3 * 4 for chunk in out.writes)
        # 1000 bytes: 333 full groups and a padded final one.
        assert len(out.writes) == -(-999 // nbytes) + 1
        assert out.writes[-1].endswith(b'==')

    def test_encode_groups(self):
        octets = np.array([0x14, 0xfb, 0x9c, 0x03, 0xd9, 0x7e], np.uint8)
        chars = encode_groups(octets)
        assert chars.dtype == np.uint8
        assert chars.tobytes() == b'FPucA9l+'
        all_ones = encode_groups(np.full(3, 0xff, np.uint8))
        assert all_ones.tobytes() == b'////'


class TestDecode:
    def setup_class(cls):
        cls.data = np.random.default_rng(54321).integers(
            0, 256, 1000, dtype=np.uint8).tobytes()

    @pytest.mark.parametrize('n', (1, 2, 3, 4, 5, 6, 7, 299, 300, 1000))
    def test_against_base64(self, n):
        data = self.data[:n]
        assert decode(base64.b64encode(data)) == data

    @pytest.mark.parametrize('n', range(13))
    def test_roundtrip(self, n):
        data = self.data[:n]
        assert decode(encode(data)) == data

    def test_input_types(self):
        text = encode(self.data[:20])
        assert decode(bytearray(text)) == self.data[:20]
        assert decode(np.frombuffer(text, np.uint8)) == self.data[:20]
        assert decode(text.decode('ascii')) == self.data[:20]

    @pytest.mark.parametrize('text', (b'A', b'AB', b'ABC', b'ABCDE',
                                      b'FPucA9k', b'FPucA9l+=', 'AB=',
                                      'AB\xe9', '\xe9\xe9\xe9\xe9\xe9'))
    def test_invalid_length(self, text):
        with pytest.raises(InvalidInputLengthError, match='multiple of 4'):
            decode(text)

    def test_invalid_length_writes_nothing(self):
        out = Sink()
        with pytest.raises(InvalidInputLengthError):
            decode(b'FPucA9l+F', out)
        assert out.writes == []

    @pytest.mark.parametrize(('text', 'char', 'position'),
                             ((b'FP-cA9l+', '-', 2),
                              (b'FPuc A9l', ' ', 4),
                              (b'FPucA9l\n', '\n', 7),
                              (b'FP=cA9l+', '=', 2),
                              (b'FPuc=9l+', '=', 4),
                              (b'=PucA9l+', '=', 0),
                              (b'FPucA9=k', 'k', 7),
                              (b'FPucA===', '=', 5),
                              (b'====', '=', 0),
                              ('FPucA9\xe9+', '\xe9', 6),
                              (b'FPucA9\xe9+', '\xe9', 6)))
    def test_invalid_character(self, text, char, position):
        with pytest.raises(InvalidCharacterError) as excinfo:
            decode(text)
        assert excinfo.value.char == char
        assert excinfo.value.position == position

    def test_invalid_character_writes_nothing(self):
        # The error is in the last block, but nothing should be written.
        out = Sink()
        text = encode(self.data)[:-4] + b'AB*D'
        with pytest.raises(InvalidCharacterError):
            decode(text, out, block_size=3)
        assert out.writes == []

    def test_non_canonical(self):
        # Bits beyond the last byte are ignored.
        assert decode(b'FPucA9l=') == decode(b'FPucA9k=')
        assert decode(b'FPucA/==') == decode(b'FPucAw==')

    @pytest.mark.parametrize('block_size', (1, 3, 6, 300))
    def test_blocks(self, block_size):
        out = Sink()
        decode(base64.b64encode(self.data), out, block_size=block_size)
        assert out.getvalue() == self.data
        nbytes = max(block_size // 3, 1) * 3
        assert all(len(chunk) <= nbytes for chunk in out.writes)
        assert len(out.writes) == -(-999 // nbytes) + 1
        assert len(out.writes[-1]) == 1

    def test_decode_groups(self):
        indices = np.array([5, 15, 46, 28, 0, 61, 37, 62])
        octets = decode_groups(indices)
        assert octets.dtype == np.uint8
        assert octets.tobytes() == b'\x14\xfb\x9c\x03\xd9\x7e'

    def test_changed_character(self):
        # The first character of a group only encodes bits of one byte.
        text = bytearray(encode(self.data[:30]))
        text[4] = ord('B') if text[4] != ord('B') else ord('C')
        decoded = decode(bytes(text))
        assert len(decoded) == 30
        assert sum(a != b for a, b in zip(decoded, self.data[:30])) == 1
