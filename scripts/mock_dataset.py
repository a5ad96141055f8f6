import json
from pathlib import Path

import numpy as np
import pandas as pd

from choromap.geo.features import generate_feature_collection

n_locations = 9
locations = [chr(ord("A") + i) for i in range(n_locations)]
labels = ["cars", "bikes"]
groups = ["2023", "2024"]

rng = np.random.default_rng(7)

rows = [
    {
        "location": location,
        "label": label,
        "group": group,
        "value": int(rng.poisson(lam=20)),
    }
    for location in locations
    for label in labels
    for group in groups
]
df = pd.DataFrame(rows)

out = Path("config/data")
out.mkdir(parents=True, exist_ok=True)

df.to_csv(out / "demo.csv", index=False)
(out / "demo.geojson").write_text(json.dumps(generate_feature_collection(locations), indent=1))

print("wrote", out / "demo.csv", df.shape, "and", out / "demo.geojson")
