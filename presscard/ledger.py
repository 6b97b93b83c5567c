"""
On-chain ledger for press ID tokens

Mints and revokes tokens on the press ID contract with the administrative key.
Ledger writes are best effort: a failed call is logged and returns None so the
local issuance or update still goes through.
"""

import logging
import threading

from eth_account import Account
from web3 import Web3

from presscard.utils import app_singleton

logger = logging.getLogger(__name__)

# Only the contract functions the service calls
PRESS_ID_ABI = [
    {
        'type': 'function',
        'name': 'mintId',
        'stateMutability': 'nonpayable',
        'inputs': [
            {'name': 'to', 'type': 'address'},
            {'name': 'tokenURI', 'type': 'string'},
        ],
        'outputs': [{'name': 'tokenId', 'type': 'uint256'}],
    },
    {
        'type': 'function',
        'name': 'setRevoked',
        'stateMutability': 'nonpayable',
        'inputs': [
            {'name': 'tokenId', 'type': 'uint256'},
            {'name': 'value', 'type': 'bool'},
        ],
        'outputs': [],
    },
]


class LedgerWriter:
    """Signs and sends press ID contract transactions from the admin account"""

    def __init__(self, w3, account, contract_address):
        self.w3 = w3
        self.account = account
        self.contract = w3.eth.contract(address=Web3.to_checksum_address(contract_address), abi=PRESS_ID_ABI)
        # One nonce sequence per key: build, sign and send one transaction at a time
        self._send_lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        rpc_url = config.get('RPC_URL')
        private_key = config.get('ADMIN_PRIVATE_KEY')
        contract_address = config.get('PRESS_ID_CONTRACT_ADDRESS')
        if not (rpc_url and private_key and contract_address):
            return None

        if not private_key.startswith('0x'):
            private_key = f'0x{private_key}'
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': config.get('LEDGER_TIMEOUT', 30.0)}))
        return cls(w3, Account.from_key(private_key), contract_address)

    def mint(self, owner, token_uri):
        """Mint a press ID token to owner; returns the transaction hash or None"""
        try:
            owner = Web3.to_checksum_address(owner)
        except ValueError as exc:
            logger.error(f'Cannot mint to invalid address {owner!r}: {exc}')
            return None
        return self._transact('mintId', owner, token_uri)

    def set_revoked(self, token_id, value=True):
        """Flag a token as revoked (or not); returns the transaction hash or None"""
        return self._transact('setRevoked', int(token_id), bool(value))

    def _transact(self, function_name, *args):
        try:
            with self._send_lock:
                call = getattr(self.contract.functions, function_name)(*args)
                transaction = call.build_transaction({
                    'from': self.account.address,
                    'nonce': self.w3.eth.get_transaction_count(self.account.address, 'pending'),
                    'chainId': self.w3.eth.chain_id,
                })
                signed = self.account.sign_transaction(transaction)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            logger.error(f'{function_name} transaction failed: {exc}', exc_info=True)
            return None

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f'{function_name} transaction sent: {tx_hash}')
        return tx_hash


def get_ledger_writer():
    """Process-wide ledger writer for the current app, or None when the ledger is not configured"""
    return app_singleton('ledger', LedgerWriter.from_config)
