"""Repositories over the signing backend."""

from esignportal.infrastructure.repositories.signing import SigningRepository, build_repository

__all__ = ["SigningRepository", "build_repository"]
