"""Users domain: account rows shared by the quota and billing paths."""
