"""
Centralized constants for pair calculations.
"""
# Rest masses in GeV/c^2 keyed by absolute PDG code
KNOWN_MASSES = {
    11: 0.000511,      # electron
    13: 0.105658,      # muon
    22: 0.0,           # photon
    111: 0.134977,     # pi0
    211: 0.139570,     # pi+
    310: 0.497611,     # K0S
    321: 0.493677,     # K+
    2112: 0.939565,    # neutron
    2212: 0.938272,    # proton
    3122: 1.115683,    # Lambda
    3312: 1.321710,    # Xi-
    3334: 1.672450,    # Omega-
    1000010020: 1.875613,  # deuteron
}

# Binning of the per-particle QA histograms: (bins, low, high)
QA_BINNING = {
    "hPt": (100, 0.0, 4.0),
    "hEta": (100, -1.0, 1.0),
    "hPhi": (360, 0.0, 6.28),
}

ZVTX_BINNING = (240, -12.0, 12.0)
