"""Solana account access: RPC reads, account layouts and PDAs."""
