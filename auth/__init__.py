"""
auth — User authentication module.

Provides:
  • Signed bearer token creation & verification
  • Password hashing (bcrypt, worker-thread offloaded)
  • Sign-up / sign-in workflow and API routes
  • ``get_current_user_id`` FastAPI dependency
"""
