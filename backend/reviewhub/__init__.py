"""ReviewHub: App Store and Google Play review aggregation API."""
