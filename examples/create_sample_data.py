"""Crée un fichier de profils de démonstration pour colocmatch."""

import pandas as pd
from pathlib import Path

DATA_DIR = Path(__file__).parent / "data"
DATA_DIR.mkdir(exist_ok=True)

profiles = pd.DataFrame({
    "user_id": ["alice", "bruno", "chloe", "dmitri", "emma", ""],
    "housing_region": ["New York Area", "New York Area", "Bay Area", "New York Area", "New York Area", "Bay Area"],
    "gender_mixed_ok": ["yes", "no", "yes", "yes", "", "no"],
    "monthly_budget": ["1500", "1800", "2200", "1450", "", "2000"],
    "desired_roommates": ["1", "2", "1", "4", "1", "2"],
    "housing_cities": ["Manhattan; Brooklyn", "Brooklyn", "Palo Alto; San Jose", "Queens; Brooklyn", "", "San Jose"],
    "non_negotiables": ["No smoking; Quiet hours", "No smoking", "No pets", "Night owl; No smoking", "", ""],
})

profiles.to_excel(DATA_DIR / "profiles.xlsx", index=False, engine="openpyxl")
print(f"Fichier créé dans {DATA_DIR}")
