"""Storage engine adapters usable with the salvage harness."""
