from docvault.oracle.base import BaseAuthenticityOracle
from docvault.oracle.factory import OracleFactory
from docvault.oracle.oracle import AuthenticityOracle

__all__ = ["AuthenticityOracle", "BaseAuthenticityOracle", "OracleFactory"]
