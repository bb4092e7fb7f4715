"""Blocks, transactions, encoding, proof of work and the chain itself."""