"""
Core building blocks used by the HTTP layer

- executor: shell / argv command execution
- units: systemctl listing parser
- systemd, files, scheduler: the side effects behind each handler
- sessions: server-side session store and credential check
"""
