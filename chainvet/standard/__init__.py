"""Standard chain configuration: parameter bounds, roles, versions and its loader."""