"""HTTP service exposing table views and exports."""
