from typing import Generator, List, Protocol

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


# AES-128
BLOCK_SIZE = 16


def fixed_xor(b1: bytes, b2: bytes) -> bytes:
    """
    Take two bytes arguments of equal length, return their XOR

    >>> arg1 = bytes.fromhex('1c0111001f010100061a024b53535009181c')
    >>> arg2 = bytes.fromhex('686974207468652062756c6c277320657965')
    >>> fixed_xor(arg1, arg2).hex()
    '746865206b696420646f6e277420706c6179'

    >>> fixed_xor(b"AAAA", b"AAA")
    Traceback (most recent call last):
    ValueError: Arguments are of different length
    """
    if len(b1) != len(b2):
        raise ValueError("Arguments are of different length")
    return bytes(a ^ b for a, b in zip(b1, b2))


def xor_into(buf: bytearray, other: bytes) -> None:
    """
    XOR other into buf in place. Both must be the same length

    >>> buf = bytearray(b"\\x0f\\xf0")
    >>> xor_into(buf, b"\\xff\\xff")
    >>> bytes(buf)
    b'\\xf0\\x0f'
    """
    if len(buf) != len(other):
        raise ValueError("Arguments are of different length")
    for i, b in enumerate(other):
        buf[i] ^= b


def chunkify(b: bytes, chunk_size: int) -> Generator[bytes, None, None]:
    """
    Yield chunk_size sized chunks from b

    >>> list(chunkify(b"ABCD", 2))
    [b'AB', b'CD']

    >>> list(chunkify(b"ABCDE", 2))
    [b'AB', b'CD', b'E']
    """
    for i in range(0, len(b), chunk_size):
        yield b[i:i + chunk_size]


class BlockCipher(Protocol):
    """
    A keyed transform over blocks of exactly block_size bytes. This is all the chaining modes in this repo
    need to know about a cipher
    """
    block_size: int

    def encrypt_block(self, block: bytes) -> bytes:
        ...

    def decrypt_block(self, block: bytes) -> bytes:
        ...


class AES128:
    """
    The raw AES-128 block transform, i.e. ECB over exactly one block

    >>> aes = AES128(b"YELLOW SUBMARINE")
    >>> aes.block_size
    16
    >>> aes.decrypt_block(aes.encrypt_block(b"Beware the hazm.")) == b"Beware the hazm."
    True

    >>> aes.encrypt_block(b"too short")
    Traceback (most recent call last):
    ValueError: Block must be exactly 16 bytes, got 9

    >>> AES128(b"too short")
    Traceback (most recent call last):
    ValueError: Invalid key size (72) for AES.
    """
    block_size: int = BLOCK_SIZE

    def __init__(self, key: bytes):
        cipher = Cipher(algorithms.AES128(key), modes.ECB())
        # ECB contexts carry no state between blocks
        self._encryptor = cipher.encryptor()
        self._decryptor = cipher.decryptor()

    def encrypt_block(self, block: bytes) -> bytes:
        self._check_block(block)
        return self._encryptor.update(bytes(block))

    def decrypt_block(self, block: bytes) -> bytes:
        self._check_block(block)
        return self._decryptor.update(bytes(block))

    def _check_block(self, block: bytes) -> None:
        if len(block) != self.block_size:
            raise ValueError(f"Block must be exactly {self.block_size} bytes, got {len(block)}")


def aes128_cbc_encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """
    Encrypt plaintext using AES-128 in CBC mode (the hard way) using the given key

    No padding is applied, so plaintext must be a whole number of blocks. This is the textbook reference that
    ciphertext stealing is checked against

    >>> key = b"chicken teriyaki"
    >>> iv = bytes(16)
    >>> plaintext = b"I would like the General Gau's C"
    >>> aes128_cbc_encrypt(plaintext, key=key, iv=iv).hex()
    '97687268d6ecccc0c07b25e25ecfe58439312523a78662d5be7fcbcc98ebf5a8'

    >>> aes128_cbc_encrypt(b"AAAA", key=key, iv=iv)
    Traceback (most recent call last):
    ValueError: The length of the provided data is not a multiple of the block length.

    # This actually blows up in fixed_xor before the cipher gets a chance to complain
    >>> aes128_cbc_encrypt(b"A"*16, key=key, iv=b"too short")
    Traceback (most recent call last):
    ValueError: Arguments are of different length
    """
    if len(plaintext) % BLOCK_SIZE:
        raise ValueError("The length of the provided data is not a multiple of the block length.")

    aes = AES128(key)
    ciphertext: List[bytes] = []
    prev_block = iv
    for chunk in chunkify(plaintext, chunk_size=BLOCK_SIZE):
        prev_block = aes.encrypt_block(fixed_xor(chunk, prev_block))
        ciphertext.append(prev_block)

    return b"".join(ciphertext)


def aes128_cbc_decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """
    Decrypt ciphertext using AES-128 in CBC mode (the hard way) using the given key. No padding is removed

    >>> key = b"chicken teriyaki"
    >>> iv = bytes(16)
    >>> ct = bytes.fromhex('97687268d6ecccc0c07b25e25ecfe58439312523a78662d5be7fcbcc98ebf5a8')
    >>> aes128_cbc_decrypt(ct, key=key, iv=iv)
    b"I would like the General Gau's C"

    >>> aes128_cbc_decrypt(b"too short", key=key, iv=iv)
    Traceback (most recent call last):
    ValueError: The length of the provided data is not a multiple of the block length.
    """
    if len(ciphertext) % BLOCK_SIZE:
        raise ValueError("The length of the provided data is not a multiple of the block length.")

    aes = AES128(key)
    plaintext: List[bytes] = []
    prev_block = iv
    for chunk in chunkify(ciphertext, chunk_size=BLOCK_SIZE):
        plaintext.append(fixed_xor(aes.decrypt_block(chunk), prev_block))
        # Prepare to XOR this block into the next decryption operation
        prev_block = chunk

    return b"".join(plaintext)
