"""
Persistence - Draft document codec and draft API client
"""
