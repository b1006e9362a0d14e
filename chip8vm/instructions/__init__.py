"""CHIP-8 instruction implementations, one module per instruction family."""
