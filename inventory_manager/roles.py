# Built-in role table. Loaded into a PermissionGate once by create_app.

PERMISSION_GROUPS = {
    'users': ['view_any', 'view', 'create', 'update', 'delete', 'restore', 'force_delete',
              'assign_roles', 'revoke_roles', 'assign_permissions', 'export'],
    'items': ['view_any', 'view', 'create', 'update', 'delete', 'restore', 'force_delete',
              'export', 'import', 'view_cost', 'update_cost', 'generate_qr', 'print_qr',
              'view_history', 'bulk_update'],
    'categories': ['view_any', 'view', 'create', 'update', 'delete'],
    'locations': ['view_any', 'view', 'create', 'update', 'delete'],
    'assignments': ['view_any', 'view', 'view_own', 'create', 'update', 'delete',
                    'assign_to_self', 'assign_to_others', 'approve', 'reject', 'export'],
    'returns': ['view_any', 'view', 'create', 'update', 'delete', 'mark_returned', 'inspect',
                'approve_condition', 'report_damage'],
    'maintenance': ['view_any', 'view', 'create', 'update', 'delete', 'schedule', 'complete',
                    'assign', 'approve_cost'],
    'disposals': ['view_any', 'view', 'create', 'update', 'delete', 'request', 'approve',
                  'execute', 'export'],
    'reports': ['view', 'export', 'inventory_summary', 'user_assignments', 'item_history',
                'maintenance', 'disposal', 'financial', 'activity', 'custom'],
    'activity_logs': ['view_any', 'view', 'export', 'delete'],
    'dashboard': ['view', 'view_stats', 'view_charts', 'view_pending', 'view_alerts'],
    'settings': ['view', 'update', 'manage_system', 'manage_email', 'manage_notifications',
                 'manage_security'],
    'notifications': ['view', 'create', 'mark_read', 'delete', 'send_bulk'],
    'requests': ['view_any', 'view', 'create', 'update', 'delete', 'approve', 'reject'],
}

ALL_PERMISSIONS = [f'{group}.{action}'
                   for group, actions in PERMISSION_GROUPS.items()
                   for action in actions]

SUPERUSER_ROLE = 'superadmin'

_ALL_REPORTS = [f'reports.{action}' for action in PERMISSION_GROUPS['reports']]
_ALL_DASHBOARD = [f'dashboard.{action}' for action in PERMISSION_GROUPS['dashboard']]

ROLE_PERMISSIONS = {
    SUPERUSER_ROLE: ALL_PERMISSIONS,
    'property_administrator': [
        'items.view_any', 'items.view', 'items.create', 'items.update', 'items.delete',
        'items.restore', 'items.export', 'items.import', 'items.view_cost', 'items.update_cost',
        'items.generate_qr', 'items.print_qr', 'items.view_history', 'items.bulk_update',
        'assignments.view_any', 'assignments.view', 'assignments.create', 'assignments.update',
        'assignments.delete', 'assignments.assign_to_self', 'assignments.assign_to_others',
        'assignments.approve', 'assignments.reject', 'assignments.export',
        'returns.view_any', 'returns.view', 'returns.create', 'returns.update', 'returns.delete',
        'returns.mark_returned', 'returns.inspect', 'returns.approve_condition',
        'returns.report_damage',
        # execution is left to superadmin
        'disposals.view_any', 'disposals.view', 'disposals.create', 'disposals.update',
        'disposals.delete', 'disposals.request', 'disposals.approve', 'disposals.export',
        'maintenance.view_any', 'maintenance.view', 'maintenance.create', 'maintenance.update',
        'maintenance.delete', 'maintenance.schedule', 'maintenance.complete',
        'maintenance.assign', 'maintenance.approve_cost',
        *_ALL_REPORTS,
        'activity_logs.view_any', 'activity_logs.view', 'activity_logs.export',
        'categories.view_any', 'categories.view', 'categories.create', 'categories.update',
        'categories.delete',
        'locations.view_any', 'locations.view', 'locations.create', 'locations.update',
        'locations.delete',
        *_ALL_DASHBOARD,
    ],
    'property_manager': [
        'items.view_any', 'items.view', 'items.create', 'items.update',
        'items.generate_qr', 'items.print_qr', 'items.view_history',
        'assignments.view_any', 'assignments.create', 'assignments.assign_to_others',
        'returns.view_any', 'returns.create', 'returns.mark_returned',
        'maintenance.view_any', 'maintenance.create', 'maintenance.schedule',
        'reports.view', 'reports.user_assignments', 'reports.item_history',
        'reports.inventory_summary',
        'activity_logs.view_any',
        *_ALL_DASHBOARD,
    ],
    'inventory_clerk': [
        'items.view_any', 'items.view', 'items.create', 'items.update',
        'items.generate_qr', 'items.print_qr',
        'categories.view_any', 'locations.view_any',
        'assignments.view_any', 'assignments.create',
        'returns.view_any', 'returns.create', 'returns.mark_returned',
        'reports.view', 'reports.inventory_summary',
        'dashboard.view',
    ],
    'assignment_officer': [
        'items.view_any', 'items.view',
        'assignments.view_any', 'assignments.view', 'assignments.create',
        'assignments.assign_to_others',
        'returns.view_any', 'returns.view', 'returns.create', 'returns.mark_returned',
        'returns.inspect',
        'reports.view', 'reports.user_assignments',
        'dashboard.view', 'dashboard.view_pending',
    ],
    'maintenance_coordinator': [
        'items.view_any', 'items.view',
        'maintenance.view_any', 'maintenance.view', 'maintenance.create', 'maintenance.update',
        'maintenance.schedule', 'maintenance.complete', 'maintenance.assign',
        'reports.view', 'reports.maintenance',
        'dashboard.view',
    ],
    'auditor': [
        'items.view_any', 'items.view', 'items.view_cost', 'items.view_history',
        'assignments.view_any', 'assignments.view',
        'returns.view_any', 'returns.view',
        'maintenance.view_any', 'maintenance.view',
        'disposals.view_any', 'disposals.view',
        'categories.view_any', 'categories.view',
        'locations.view_any', 'locations.view',
        *_ALL_REPORTS,
        'activity_logs.view_any', 'activity_logs.view', 'activity_logs.export',
        *_ALL_DASHBOARD,
    ],
    'department_head': [
        'items.view_any', 'items.view',
        'assignments.view_any', 'assignments.view',
        'requests.view', 'requests.create',
        'reports.view', 'reports.user_assignments',
        'dashboard.view',
    ],
    'staff': [
        'items.view',
        'assignments.view_own',
        'returns.create',
        'requests.create',
        'notifications.view',
        'dashboard.view',
    ],
    'report_viewer': [
        *_ALL_REPORTS,
        'dashboard.view', 'dashboard.view_stats', 'dashboard.view_charts',
        'items.view_any', 'items.view',
    ],
}
