from typing import Tuple

from util import AES128, BlockCipher, fixed_xor, xor_into

"""
Ciphertext stealing, CTS-3 (Kerberos) flavour

CBC needs a whole number of blocks, so messages usually get padded out with PKCS#7 and the ciphertext grows.
Ciphertext stealing avoids that. Run CBC as normal, but:

    Zero-pad the last (possibly partial) plaintext block and encrypt it as the final CBC block.
    Swap the last two ciphertext blocks.
    Truncate the new last block to the length of the partial plaintext block.

The bytes that get truncated away are "stolen". They are never sent, because the receiver can recover them:
decrypting the full final block gives (zero-padded last plaintext block) XOR (second-to-last ciphertext block),
and the trailing bytes of the padded plaintext are known to be zero.

This is the variant RFC 3962 uses for the Kerberos AES encryption types. The swap happens even when the
plaintext is a whole number of blocks, so the message must be strictly longer than one block.
"""


class CTSError(ValueError):
    pass


class InvalidIVLength(CTSError):
    pass


class InputTooShort(CTSError):
    pass


class OutputTooSmall(CTSError):
    pass


def _truncated_copy(dst, offset: int, end: int, block: bytes) -> int:
    """
    Copy as much of block into dst[offset:end] as fits, and return the number of bytes copied. Nothing is
    written at or past end

    >>> dst = bytearray(b"......")
    >>> _truncated_copy(dst, 2, 5, b"ABCD")
    3
    >>> dst
    bytearray(b'..ABC.')
    """
    count = min(end - offset, len(block))
    dst[offset:offset + count] = block[:count]
    return count


class _CTSMode:
    """
    Chaining state shared by the encrypter and the decrypter

    The chaining value starts out as a copy of the caller's IV and is updated in place by every call, so it can
    be read back after a message (e.g. by a protocol that explicitly chains messages together). Two scratch
    blocks are allocated once per instance and reused.

    Instances are not safe to use from more than one thread at a time. Construct one per stream.
    """
    cipher: BlockCipher
    verbose: bool

    def __init__(self, cipher: BlockCipher, iv: bytes, verbose: bool = False):
        block_size = cipher.block_size
        if len(iv) != block_size:
            raise InvalidIVLength(f"IV length must equal the block size ({block_size}), got {len(iv)}")
        self.cipher = cipher
        self.verbose = verbose
        self._block_size = block_size
        self._iv = bytearray(iv)
        self._tmp = bytearray(block_size)
        self._tmp2 = bytearray(block_size)

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def iv(self) -> bytes:
        """
        The current chaining value
        """
        return bytes(self._iv)

    def _layout(self, length: int) -> Tuple[int, int]:
        """
        Return (number of blocks, length of the last block) for a message of the given length. A message that
        is a whole number of blocks has a full last block rather than an extra empty one
        """
        num_blocks, tail = divmod(length, self._block_size)
        if tail:
            num_blocks += 1
        else:
            tail = self._block_size
        if num_blocks < 2:
            raise InputTooShort(f"Input must be longer than one block ({self._block_size} bytes), got {length}")
        return num_blocks, tail

    @staticmethod
    def _check_output(dst, src: bytes) -> None:
        if len(dst) < len(src):
            raise OutputTooSmall(f"Output ({len(dst)} bytes) is smaller than input ({len(src)} bytes)")


class Encrypter(_CTSMode):
    """
    >>> encrypter = Encrypter(AES128(b"chicken teriyaki"), iv=bytes(16))
    >>> encrypter.encrypt(b"I would like the ").hex()
    'c6353568f2bf8cb4d8a580362da7ff7f97'
    >>> encrypter.iv.hex()
    'c6353568f2bf8cb4d8a580362da7ff7f'

    >>> Encrypter(AES128(b"chicken teriyaki"), iv=bytes(16)).encrypt(b"A"*16)
    Traceback (most recent call last):
    cts.InputTooShort: Input must be longer than one block (16 bytes), got 16

    >>> Encrypter(AES128(b"chicken teriyaki"), iv=bytes(8))
    Traceback (most recent call last):
    cts.InvalidIVLength: IV length must equal the block size (16), got 8
    """

    def encrypt(self, plaintext: bytes) -> bytes:
        ciphertext = bytearray(len(plaintext))
        self.crypt_blocks(ciphertext, plaintext)
        return bytes(ciphertext)

    def crypt_blocks(self, dst, src: bytes) -> None:
        """
        Encrypt src into the writable buffer dst, which must be at least as long as src. Only the first len(src)
        bytes of dst are written, and nothing is written if the lengths are bad
        """
        src = bytes(src)
        num_blocks, tail = self._layout(len(src))
        self._check_output(dst, src)
        n = self._block_size

        # Standard CBC for all but the last block
        for i in range(num_blocks - 1):
            self._tmp[:] = src[i * n:(i + 1) * n]
            xor_into(self._tmp, self._iv)
            self._iv[:] = self.cipher.encrypt_block(bytes(self._tmp))
            if i < num_blocks - 2:
                dst[i * n:(i + 1) * n] = self._iv
            else:
                # Goes last, cut down to the length of the final plaintext block. The rest is stolen
                _truncated_copy(dst, (num_blocks - 1) * n, len(src), self._iv)

        # Zero-pad the final plaintext block and encrypt it into the second-to-last slot
        last = (num_blocks - 1) * n
        self._tmp[:tail] = src[last:]
        self._tmp[tail:] = bytes(n - tail)
        xor_into(self._tmp, self._iv)
        self._iv[:] = self.cipher.encrypt_block(bytes(self._tmp))
        dst[(num_blocks - 2) * n:last] = self._iv

        if self.verbose:
            print(f"Encrypt: {src!r} --> {bytes(dst[:len(src)])!r}")


class Decrypter(_CTSMode):
    """
    >>> decrypter = Decrypter(AES128(b"chicken teriyaki"), iv=bytes(16))
    >>> decrypter.decrypt(bytes.fromhex('c6353568f2bf8cb4d8a580362da7ff7f97'))
    b'I would like the '
    >>> decrypter.iv.hex()
    'c6353568f2bf8cb4d8a580362da7ff7f'

    >>> Decrypter(AES128(b"chicken teriyaki"), iv=bytes(16)).decrypt(b"")
    Traceback (most recent call last):
    cts.InputTooShort: Input must be longer than one block (16 bytes), got 0
    """

    def decrypt(self, ciphertext: bytes) -> bytes:
        plaintext = bytearray(len(ciphertext))
        self.crypt_blocks(plaintext, ciphertext)
        return bytes(plaintext)

    def crypt_blocks(self, dst, src: bytes) -> None:
        """
        Decrypt src into the writable buffer dst, which must be at least as long as src. Only the first len(src)
        bytes of dst are written, and nothing is written if the lengths are bad
        """
        src = bytes(src)
        num_blocks, tail = self._layout(len(src))
        self._check_output(dst, src)
        n = self._block_size

        # Standard CBC for everything before the swapped pair
        for i in range(num_blocks - 2):
            block = src[i * n:(i + 1) * n]
            dst[i * n:(i + 1) * n] = fixed_xor(self.cipher.decrypt_block(block), self._iv)
            self._iv[:] = block

        # The second-to-last slot holds the final encrypted block
        last = (num_blocks - 1) * n
        final_block = src[(num_blocks - 2) * n:last]
        self._tmp[:] = self.cipher.decrypt_block(final_block)

        # Rebuild the real second-to-last ciphertext block from what was sent plus the stolen bytes
        self._tmp2[:tail] = src[last:]
        self._tmp2[tail:] = self._tmp[tail:]
        dst[(num_blocks - 2) * n:last] = fixed_xor(self.cipher.decrypt_block(bytes(self._tmp2)), self._iv)
        self._iv[:] = self._tmp2

        xor_into(self._tmp, self._iv)
        _truncated_copy(dst, last, len(src), self._tmp)

        # Leave the chaining value where the encrypter leaves it
        self._iv[:] = final_block

        if self.verbose:
            print(f"Decrypt: {src!r} --> {bytes(dst[:len(src)])!r}")


def aes128_cts_encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """
    Encrypt plaintext using AES-128 with CTS-3 ciphertext stealing. The ciphertext is the same length as the
    plaintext

    >>> key = b"chicken teriyaki"
    >>> iv = bytes(16)
    >>> plaintext = b"I would like the General Gau's "
    >>> aes128_cts_encrypt(plaintext, key=key, iv=iv).hex()
    'fc00783e0efdb2c1d445d4c8eff7ed2297687268d6ecccc0c07b25e25ecfe5'

    >>> aes128_cts_encrypt(b"AAAA", key=key, iv=iv)
    Traceback (most recent call last):
    cts.InputTooShort: Input must be longer than one block (16 bytes), got 4
    """
    return Encrypter(AES128(key), iv).encrypt(plaintext)


def aes128_cts_decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """
    Decrypt ciphertext using AES-128 with CTS-3 ciphertext stealing

    >>> key = b"chicken teriyaki"
    >>> iv = bytes(16)
    >>> plaintext = b"I would like the General Gau's Chicken, please,"
    >>> aes128_cts_decrypt(aes128_cts_encrypt(plaintext, key=key, iv=iv), key=key, iv=iv) == plaintext
    True
    """
    return Decrypter(AES128(key), iv).decrypt(ciphertext)
