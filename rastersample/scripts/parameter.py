# File containing shared parameters for raster sampling

# Column holding the 1-based raster cell identifier in tabular output
cell_column = "cell"

# Default band names are "lyr.1", "lyr.2", ...
band_prefix = "lyr."

# Suffix appended to the band name of a stratified raster
strata_suffix = "_strata"

# Per-stratum inclusion weights are multiplied by this before they reach the
# quasi-random sampler
inclusion_scale = 1e7

# Iterations of the cLHS annealing when the caller does not give any
clh_default_iterations = 10000

# Transect generation defaults, overridden by the caller's control options
transect_control = {
    "pattern": "line",
    "randomness_mode": "pseudo",
    "n_points": 10,
    "n_rotate": 11,
    "line_length": None,
}

# Default extent used when a raster is built without a transform
default_bounds = (-180.0, -90.0, 180.0, 90.0)

# Add target CRS parameters
target_crs_epsg = 4326
target_crs_str = f"EPSG:{target_crs_epsg}"
