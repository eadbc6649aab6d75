"""Core module for the SumVid backend."""
