"""Configuration file schemas for gitlabkit."""

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "deployment": {
            "type": "object",
            "properties": {
                "gitlab_dir": {
                    "type": "string",
                    "description": "Root of the generated deployment tree"
                },
                "domain": {
                    "type": "string",
                    "pattern": r"^[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$",
                    "description": "Public GitLab host name"
                },
                "base_domain": {
                    "type": "string",
                    "pattern": r"^[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$",
                    "description": "Mail and wildcard certificate domain"
                },
                "intranet_hostname": {
                    "type": "string",
                    "default": "gitlab.intra"
                },
                "secrets_file": {
                    "type": "string"
                },
                "owner": {
                    "type": "string",
                    "pattern": r"^\d+:\d+$",
                    "default": "1000:1000"
                }
            },
            "additionalProperties": False
        },
        "acme": {
            "type": "object",
            "properties": {
                "dns_provider": {
                    "type": "string",
                    "pattern": r"^dns_[a-z0-9_]+$",
                    "default": "dns_aliyun"
                },
                "server": {
                    "type": "string",
                    "default": "letsencrypt"
                },
                "renew_schedule": {
                    "type": "string",
                    "description": "Five-field cron expression",
                    "pattern": r"^\S+(\s+\S+){4}$",
                    "default": "0 2 1 */2 *"
                }
            },
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}
