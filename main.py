from presscard import create_app
import os

app = create_app()


def describe_integrations():
    """Log which optional integrations are configured"""
    config = app.config
    ipfs = 'enabled' if config.get('IPFS_API_URL') else 'disabled'
    ledger = 'enabled' if all(config.get(k) for k in ('RPC_URL', 'ADMIN_PRIVATE_KEY', 'PRESS_ID_CONTRACT_ADDRESS')) else 'disabled'
    app.logger.info(f"IPFS publishing {ipfs}, on-chain minting {ledger}")
    if not config.get('ADMIN_API_TOKEN'):
        app.logger.warning("ADMIN_API_TOKEN is not set; admin endpoints will refuse every request")


describe_integrations()


if __name__ == "__main__":
    # Bind to 0.0.0.0 to accept connections from outside the container
    port = int(os.environ.get('PORT', 5051))
    app.run(host='0.0.0.0', port=port, debug=True)
