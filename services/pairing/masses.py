"""
Mass-hypothesis lookup by PDG code.
"""
from domain.errors import ConfigurationError
from services.pairing import consts


def get_mass(pdg_code: int) -> float:
    """
    Rest mass for a PDG code; antiparticles share the particle mass.

    Raises:
        ConfigurationError: If the code is not in the mass table
    """
    try:
        return consts.KNOWN_MASSES[abs(int(pdg_code))]
    except KeyError:
        raise ConfigurationError(f"No mass known for PDG code {pdg_code}") from None
