#!/usr/bin/env python3
from collections import namedtuple
from typing import List

from cts import Decrypter, Encrypter
from util import AES128

"""
AES-128 ciphertext stealing test vectors

RFC 3962 (Advanced Encryption Standard (AES) Encryption for Kerberos 5), Appendix B:

    Some test vectors for CBC with ciphertext stealing, using an initial vector of all-zero.

    AES 128-bit key:
      0000:  63 68 69 63 6b 65 6e 20 74 65 72 69 79 61 6b 69

Each vector gives the input, the output, and the "next IV", which is the chaining value left behind after the
message has been encrypted. Encrypt each input, check the output and next IV, then decrypt the output and check
we got the input back.
"""


KEY = b"chicken teriyaki"
IV = bytes(16)

Vector = namedtuple("Vector", ["plaintext", "ciphertext", "next_iv"])

VECTORS: List[Vector] = [
    Vector(plaintext=b"I would like the ",
           ciphertext=bytes.fromhex("c6353568f2bf8cb4d8a580362da7ff7f97"),
           next_iv=bytes.fromhex("c6353568f2bf8cb4d8a580362da7ff7f")),
    Vector(plaintext=b"I would like the General Gau's ",
           ciphertext=bytes.fromhex("fc00783e0efdb2c1d445d4c8eff7ed22"
                                    "97687268d6ecccc0c07b25e25ecfe5"),
           next_iv=bytes.fromhex("fc00783e0efdb2c1d445d4c8eff7ed22")),
    Vector(plaintext=b"I would like the General Gau's C",
           ciphertext=bytes.fromhex("39312523a78662d5be7fcbcc98ebf5a8"
                                    "97687268d6ecccc0c07b25e25ecfe584"),
           next_iv=bytes.fromhex("39312523a78662d5be7fcbcc98ebf5a8")),
    Vector(plaintext=b"I would like the General Gau's Chicken, please,",
           ciphertext=bytes.fromhex("97687268d6ecccc0c07b25e25ecfe584"
                                    "b3fffd940c16a18c1b5549d2f838029e"
                                    "39312523a78662d5be7fcbcc98ebf5"),
           next_iv=bytes.fromhex("b3fffd940c16a18c1b5549d2f838029e")),
    Vector(plaintext=b"I would like the General Gau's Chicken, please, ",
           ciphertext=bytes.fromhex("97687268d6ecccc0c07b25e25ecfe584"
                                    "9dad8bbb96c4cdc03bc103e1a194bbd8"
                                    "39312523a78662d5be7fcbcc98ebf5a8"),
           next_iv=bytes.fromhex("9dad8bbb96c4cdc03bc103e1a194bbd8")),
    Vector(plaintext=b"I would like the General Gau's Chicken, please, and wonton soup.",
           ciphertext=bytes.fromhex("97687268d6ecccc0c07b25e25ecfe584"
                                    "39312523a78662d5be7fcbcc98ebf5a8"
                                    "4807efe836ee89a526730dbc2f7bc840"
                                    "9dad8bbb96c4cdc03bc103e1a194bbd8"),
           next_iv=bytes.fromhex("4807efe836ee89a526730dbc2f7bc840")),
]


def check_vector(vector: Vector, verbose: bool = False) -> bool:
    """
    Return True if both directions of AES-128 CTS reproduce the vector

    >>> all(check_vector(v) for v in VECTORS)
    True

    >>> check_vector(Vector(b"I would like the ", bytes(17), bytes(16)))
    False
    """
    encrypter = Encrypter(AES128(KEY), IV, verbose=verbose)
    ct = encrypter.encrypt(vector.plaintext)

    decrypter = Decrypter(AES128(KEY), IV, verbose=verbose)
    pt = decrypter.decrypt(vector.ciphertext)

    return (ct == vector.ciphertext
            and encrypter.iv == vector.next_iv
            and pt == vector.plaintext
            and decrypter.iv == vector.next_iv)


def main():
    for vector in VECTORS:
        ok = check_vector(vector, verbose=True)
        print(f"{len(vector.plaintext)} bytes: {'OK' if ok else 'MISMATCH'}")


if __name__ == "__main__":
    main()
