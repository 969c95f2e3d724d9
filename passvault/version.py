"""PassVault Meta information.
   PassVault keeps vault secrets encrypted on the client with a key
   derived from the user's master password.
"""
__title__ = 'passvault'
__description__ = (
   'PassVault keeps vault secrets encrypted on the client with a key '
   'derived from the user\'s master password.'
)
__version__ = '0.3.0'
__license__ = 'Apache-2.0'
