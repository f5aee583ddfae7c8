from . import agents, auth, candidates, dashboard, employers, packages, payments, sslcommerz

all_routers = [
     auth.router,
     candidates.router,
     agents.router,
     employers.router,
     packages.router,
     payments.router,
     sslcommerz.router,
     dashboard.router,
]

__all__ = ["all_routers"]
