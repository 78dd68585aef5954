"""showcase.core — framework-free domain types shared by server and client code."""
