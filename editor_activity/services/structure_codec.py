"""Encryption codec for stored project structures.

Structures are serialized to canonical JSON and encrypted with AES-256-CBC
under the configured static key. Each call to :meth:`StructureCodec.encrypt`
draws a fresh random IV; the envelope stored in the database is
``{"iv": <hex>, "ciphertext": <hex>}``.
"""
import json
import os
from functools import lru_cache
from typing import Any, Mapping

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from pydantic import ValidationError

from editor_activity.config import get_settings
from editor_activity.schemas.structure import ProjectStructure
from editor_activity.services.errors import StructureDecodeError

KEY_SIZE = 32
IV_SIZE = 16


class StructureCodec:
    """Encrypts and decrypts project structure documents."""

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError(f"Structure key must be {KEY_SIZE} bytes, got {len(key)}")
        self._key = key

    @staticmethod
    def _canonical_bytes(document: ProjectStructure) -> bytes:
        payload = document.model_dump(mode="json")
        return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def encrypt(self, document: ProjectStructure | Mapping[str, Any]) -> dict[str, str]:
        """Encrypt a structure document into a storable envelope.

        Args:
            document: Structure model, or a mapping that validates as one

        Returns:
            Envelope dict with hex-encoded ``iv`` and ``ciphertext``
        """
        if not isinstance(document, ProjectStructure):
            document = ProjectStructure.model_validate(document)

        iv = os.urandom(IV_SIZE)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(self._canonical_bytes(document)) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return {"iv": iv.hex(), "ciphertext": ciphertext.hex()}

    def decrypt(self, envelope: Any) -> ProjectStructure:
        """Decrypt a stored envelope back into a structure document.

        Args:
            envelope: Envelope previously produced by :meth:`encrypt`

        Returns:
            The decoded ProjectStructure

        Raises:
            StructureDecodeError: If the envelope is malformed, the IV has the
                wrong length, or the plaintext is not a valid structure
        """
        if not isinstance(envelope, Mapping):
            raise StructureDecodeError("Structure envelope must be an object")

        iv_hex = envelope.get("iv")
        ciphertext_hex = envelope.get("ciphertext")
        if not isinstance(iv_hex, str) or not isinstance(ciphertext_hex, str):
            raise StructureDecodeError("Structure envelope is missing iv or ciphertext")

        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError as exc:
            raise StructureDecodeError("Structure envelope is not valid hex") from exc

        if len(iv) != IV_SIZE:
            raise StructureDecodeError(f"Structure envelope IV must be {IV_SIZE} bytes, got {len(iv)}")

        try:
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise StructureDecodeError("Structure ciphertext could not be decrypted") from exc

        try:
            payload = json.loads(plaintext.decode("utf-8"))
        except ValueError as exc:
            raise StructureDecodeError("Decrypted structure is not valid JSON") from exc

        try:
            return ProjectStructure.model_validate(payload)
        except ValidationError as exc:
            raise StructureDecodeError("Decrypted structure has an unexpected shape") from exc


@lru_cache()
def get_structure_codec() -> StructureCodec:
    """Get the process-wide codec built from the configured key."""
    return StructureCodec(get_settings().structure_key_bytes)
