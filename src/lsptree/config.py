"""Default configuration settings for lsptree."""

DEFAULT_CONFIG = {
	# Hierarchy building and navigation
	"hierarchy": {
		# Jump to the first call site instead of the callee declaration
		"call_site_preferred": False,
		# Show callees instead of callers by default
		"outgoing": False,
		# Levels realized when a tree is built
		"depth": 1,
		# Levels the CLI expands before printing
		"render_depth": 3,
		# `resolve` value sent with textDocument/typeHierarchy
		"type_resolve": 1,
	},
	# Language server settings
	"server": {
		# multilspy code_language
		"language": "python",
		# Seconds to wait for each reply (0 waits forever)
		"request_timeout": 30,
		# Capabilities the server is assumed to advertise
		"capabilities": {
			"typeHierarchyProvider": True,
			"callHierarchyProvider": True,
		},
	},
}
