"""Test suite for the AegisSim library.

The structure of this test package mirrors the structure of the main
`AegisSim` package (e.g., `tests.core` for `AegisSim.core`).

The `pytest` framework is used for test discovery and execution.
"""
