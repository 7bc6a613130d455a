"""View-model API and client-side state for the SpendWise dashboard."""
